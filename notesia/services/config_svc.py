# notesia/services/config_svc.py
from ..db import read_config_yaml
from ..domain.time_entry import MODES, MODE_CARRY

DEFAULTS = {
    "keypad_mode": MODE_CARRY,
    # opt-in: drop and recreate `items` on a schema version mismatch
    "destructive_upgrade": False,
}


def _to_bool(v, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("1", "true", "yes", "on"):
            return True
        if s in ("0", "false", "no", "off"):
            return False
    return default


def get_config() -> dict:
    cfg = read_config_yaml()

    mode = str(cfg.get("keypad_mode", DEFAULTS["keypad_mode"])).strip().lower()
    out = {
        "keypad_mode": mode if mode in MODES else DEFAULTS["keypad_mode"],
        "destructive_upgrade": _to_bool(cfg.get("destructive_upgrade"), DEFAULTS["destructive_upgrade"]),
    }
    return out

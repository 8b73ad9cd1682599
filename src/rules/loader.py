"""Reads the event rules (game constants, roles, limits) from rules.yaml."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from src.rules.models import Rules


def load_rules(path: Path) -> Rules:
    """
    Parse rules.yaml into `Rules`.

    The API and the CLI call this at startup, so a bad file stops the event
    backend before it serves a request. FileNotFoundError when the path
    (SNL_RULES_PATH) does not exist; ValueError for broken YAML or values
    the models reject, such as a dice range with dice_max below dice_min.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Event rules not found at {path} (check SNL_RULES_PATH)")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in event rules {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Event rules {path} must be a mapping of sections (game, auth, ...)")

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Event rules validation failed for {path}:\n{e}") from e

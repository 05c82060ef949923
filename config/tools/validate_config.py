# config/tools/validate_config.py

import sys           # for exit codes
from pprint import pprint  # for structured printing

# make src discoverable if running as a script
from pathlib import Path
# __file__ is .../config/tools/validate_config.py
# parents[2] is the project root; append ROOT/src
PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(PROJECT_ROOT / "src"))

from env.loader import load_bridge_config  # import our loader


def main() -> None:
    """Load and print the resolved bridge config, failing fast on errors."""
    profile = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        config = load_bridge_config(profile=profile)
    except (OSError, ValueError, KeyError) as e:
        print("Config validation FAILED:", file=sys.stderr)
        print(repr(e), file=sys.stderr)
        sys.exit(1)                          # non-zero exit: CI will mark as failed

    print("Config validation OK.")
    print("\nActive profile:", config.profile)
    print("\nAPI:")
    pprint(config.api)
    print("\nBatching:")
    pprint(config.batching)
    print("\nGame state:")
    pprint(config.game_state)
    print("\nMovement:")
    pprint(config.movement)


if __name__ == "__main__":
    main()

# config/tools/validate_env.py

import sys           # for exit codes
from pprint import pprint  # for structured printing

# make src discoverable if running as a script
from pathlib import Path
# __file__ is .../config/tools/validate_env.py
# parents[2] is the project root; append ROOT/src
PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(PROJECT_ROOT / "src"))

from env.loader import load_bot_config  # import our loader


def main() -> None:
    """Load and print the resolved bot config, failing fast on errors."""
    path = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        cfg = load_bot_config(path)
    except (FileNotFoundError, ValueError) as e:
        print("Config validation FAILED:", file=sys.stderr)
        print(repr(e), file=sys.stderr)
        sys.exit(1)                          # non-zero exit: CI will mark as failed

    print("Config validation OK.")
    print("\nServer:")
    pprint(cfg.server)
    print("\nBot:", cfg.bot.username)
    print("\nDefault AI model:", cfg.default_ai_model)
    print("\nConfigured backends:")
    for name in ("chatgpt", "gemini", "deepseek"):
        state = "set" if cfg.ai_apis.for_backend(name) else "missing"
        print(f"  {name}: {state}")
    print("\nBridge:")
    pprint(cfg.bridge)


if __name__ == "__main__":
    main()  # run main() only when script is executed directly

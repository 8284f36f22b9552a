import os
import sys
from dotenv import load_dotenv

from aabexport.Config import StepConfig
from aabexport.Controllers.ExportController import ExportController
from aabexport.Lib.Export.Errors import ExportError


def main() -> int:
    # Values already set by the host win over the .env file
    load_dotenv(os.getenv("AAB_EXPORT_ENV_FILE", ".env"), override=False)

    try:
        config = StepConfig.from_env()
        print(config.describe())
        print()

        apk_path = ExportController(config).run()
    except ExportError as e:
        print(f"Failed to export apk, error: {e}", file=sys.stderr)
        return 1

    print(f"Success APK exported to: {apk_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

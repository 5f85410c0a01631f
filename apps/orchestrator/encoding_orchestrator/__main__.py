import sys

from encoding_orchestrator.cli import main

sys.exit(main())

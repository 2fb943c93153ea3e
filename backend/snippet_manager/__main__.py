import sys

from snippet_manager.server import main

sys.exit(main())

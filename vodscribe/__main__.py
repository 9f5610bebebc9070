import sys

from vodscribe.main import main

sys.exit(main())

import sys

from mazetool.main import main

sys.exit(main())

import sys

from lolwatch.app import main

sys.exit(main())

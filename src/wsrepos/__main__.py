import sys

from wsrepos.cli._dispatcher import main

sys.exit(main())

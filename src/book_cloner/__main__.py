import sys

from book_cloner.cli import main

sys.exit(main())

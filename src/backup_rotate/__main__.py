import sys

from backup_rotate.cli import main

sys.exit(main())

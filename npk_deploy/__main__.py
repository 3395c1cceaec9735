import sys

from npk_deploy.cli import main

sys.exit(main())

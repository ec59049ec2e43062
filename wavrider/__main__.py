import sys

from wavrider.cli import main

sys.exit(main())

import sys

from statsgen.runner import main

sys.exit(main())

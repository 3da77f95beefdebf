import sys

from src.pathtracer.cli import main

sys.exit(main())

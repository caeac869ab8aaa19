import sys
import os

# Project root on the import path when run from a checkout
current_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.append(current_dir)

from stopbiting.core.core import main

if __name__ == "__main__":
    sys.exit(main(sys.argv))

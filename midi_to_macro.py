# midi_to_macro.py
import sys

from midi_macro.cli import main

if __name__ == "__main__":
    sys.exit(main())

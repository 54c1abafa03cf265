#!/usr/bin/env python3
from quickhtml.cli import main

if __name__ == "__main__":
    main()

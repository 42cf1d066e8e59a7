#!/usr/bin/env python
"""
Convert landmark pairs between registration file formats
"""

import sys

from landmark_converter.cli.convert_landmarks import main

if __name__ == '__main__':
    sys.exit(main())

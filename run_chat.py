#!/usr/bin/env python
"""
Simple entry point script for image chat.
"""

from image_chat.main import main

if __name__ == "__main__":
    import sys
    sys.exit(main())

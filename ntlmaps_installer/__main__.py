# Path and File Name : ntlmaps_installer/__main__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Module entry point enabling python3 -m ntlmaps_installer invocation

import sys

from ntlmaps_installer.installer import main

if __name__ == '__main__':
    sys.exit(main())

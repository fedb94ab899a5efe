#!/usr/bin/env python3
"""
Shadow Drive CLI

Run this script to upload, delete or list files in a Shadow Drive bucket.

Usage:
    python run.py upload -k keypair.json -b BUCKET -f photo.jpg
    python run.py upload -k keypair.json -b BUCKET -f big.bin -d backups/2026
    python run.py delete -k keypair.json -b BUCKET -f https://.../BUCKET/photo.jpg
    python run.py list -k keypair.json -b BUCKET
    python run.py -j result.json delete -k keypair.json -b BUCKET -f photo.jpg
"""

import sys
from shdw_drive.cli import main

if __name__ == "__main__":
    sys.exit(main())

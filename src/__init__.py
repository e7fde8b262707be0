################################################################################
# File Name: __init__.py
# Purpose/Description: Main application package initialization
# Author: Michael Cornelison
# Creation Date: 2026-01-21
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-01-21    | M. Cornelison | Initial implementation
# 2026-10-19    | Ralph Agent  | Backup application layout
# ================================================================================
################################################################################

"""
Main application package.

This package contains the application source code organized as:
- common/: Shared utilities (config validation, env loading, logging, errors)
- backster/: Backup job (lock, dump, verify, transform, upload, notify)

Entry point: main.py
"""

__version__ = '1.0.0'

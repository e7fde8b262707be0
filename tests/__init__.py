################################################################################
# File Name: __init__.py
# Purpose/Description: Test package initialization
# Author: Ralph Agent
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Backster Project. All rights reserved.
################################################################################

"""
Test package for backster.

Run tests with:
    pytest tests/
    pytest tests/ -m "not integration"
"""

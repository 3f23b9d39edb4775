################################################################################
# File Name: __init__.py
# Purpose/Description: Test package initialization
# Author: Michael Cornelison
# Creation Date: 2026-10-12
# Copyright: (c) 2026 DriveSentry Project. All rights reserved.
################################################################################

"""
Test package for DriveSentry.

Run tests with:
    pytest tests/
    pytest tests/ -m "not integration"
"""

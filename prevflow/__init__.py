# SPDX-License-Identifier: Apache-2.0

"""
prevflow - case lifecycle boards for a social-security legal practice.
"""

__version__ = "1.0.0"

# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the prevflow case tracker.

This package contains the pure case lifecycle rules: board topology,
transition matching, the transition executor and the workflow automation
engine. Nothing here performs I/O.
"""

# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

This package contains the problem-details error handlers shared by the
board routes.
"""

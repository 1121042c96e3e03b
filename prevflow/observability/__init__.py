# SPDX-License-Identifier: Apache-2.0

"""
Observability package - tracing, structured logging and request hooks.
"""

# SPDX-License-Identifier: Apache-2.0
"""ohmage campaign access core: authorization, campaign selection and survey response projection."""

__version__ = "2.0.0"

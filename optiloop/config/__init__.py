# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Configuration: frozen pydantic schemas loaded from YAML."""

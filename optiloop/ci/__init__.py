# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""CI helpers: structural validation of workflow files."""

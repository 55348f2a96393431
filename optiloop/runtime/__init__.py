# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Bootstrap and environment checks run before every command."""

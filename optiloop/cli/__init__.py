# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""The `optiloop` command line interface."""

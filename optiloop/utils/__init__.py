# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Path, filesystem and hashing helpers."""

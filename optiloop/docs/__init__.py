# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Documentation tooling.

  - implementors: "implemented by" records, their registry and JSON manifests
  - harness: pytest harness generated from the book's code samples
"""

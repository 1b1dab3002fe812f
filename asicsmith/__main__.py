# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from asicsmith.cli import main

main()

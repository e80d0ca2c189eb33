# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""TodoList Server: personal task tracking API."""

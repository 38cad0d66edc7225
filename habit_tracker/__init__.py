#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Curve - habit tracking data layer
Месячная сетка привычек, статистика и синхронизация local-first

Версия: 1.0.0
"""

__version__ = "1.0.0"

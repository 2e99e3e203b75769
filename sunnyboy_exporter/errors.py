# SPDX-FileComment: sunnyboy-exporter
# SPDX-FileCopyrightText: Copyright (C) 2022 Ryan Finnie
# SPDX-License-Identifier: MPL-2.0


class SunnyBoyError(Exception):
    pass


class FetchError(SunnyBoyError):
    """The device could not be reached or the request could not be built"""


class DecodeError(SunnyBoyError):
    """A device response was not the expected JSON shape"""

# This software is provided 'as-is', without any express or implied
# warranty.  In no event will the author be held liable for any damages
# arising from the use of this software.
#
# Permission is granted to anyone to use this software for any purpose,
# including commercial applications, and to alter it and redistribute it
# freely, subject to the following restrictions:
#
# 1. The origin of this software must not be misrepresented; you must not
#    claim that you wrote the original software. If you use this software
#    in a product, an acknowledgment in the product documentation would be
#    appreciated but is not required.
# 2. Altered source versions must be plainly marked as such, and must not be
#    misrepresented as being the original software.
# 3. This notice may not be removed or altered from any source distribution.
#
# Copyright (c) 2011 William Grant <me@williamgrant.id.au>

import logging

__all__ = [
    'DuplicateTag',
    'get_default_logger',
    'InvalidTagSpec',
    'InvalidTagValueList',
    'parse_tag_value',
    ]


class InvalidTagValueList(Exception):
    pass


class DuplicateTag(InvalidTagValueList):
    pass


class InvalidTagSpec(InvalidTagValueList):
    pass


def parse_tag_value(tag_list):
    """Parse a DKIM Tag=Value list.

    Interprets the syntax specified by RFC6376 section 3.2.
    Assumes that folding whitespace is already unfolded.

    @param tag_list: A bytes or str containing a DKIM Tag=Value list.
    @return: dict mapping tag names to values, same type as the input.
    """
    if isinstance(tag_list, bytes):
        sep, eq = b';', b'='
    else:
        sep, eq = ';', '='
    tags = {}
    tag_specs = tag_list.split(sep)
    # Trailing semicolons are valid.
    if not tag_specs[-1].strip():
        tag_specs.pop()
    for tag_spec in tag_specs:
        try:
            key, value = tag_spec.split(eq, 1)
        except ValueError:
            raise InvalidTagSpec(tag_spec)
        key = key.strip()
        if key in tags:
            raise DuplicateTag(key)
        tags[key] = value.strip()
    return tags


def get_default_logger():
    """Get the default maildkim logger.

    Library use is silent unless the application configures logging.
    """
    logger = logging.getLogger('maildkim')
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger

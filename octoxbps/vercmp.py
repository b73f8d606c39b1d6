"""Version string comparison with RPM/pacman semantics."""

from __future__ import annotations


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_alpha(ch: str) -> bool:
    return "a" <= ch <= "z" or "A" <= ch <= "Z"


def _is_alnum(ch: str) -> bool:
    return _is_digit(ch) or _is_alpha(ch)


def rpmvercmp(a: str, b: str) -> int:
    """Compare two version strings segment by segment.

    Returns 1 if ``a`` is newer than ``b``, 0 if they are the same version
    and -1 if ``b`` is newer than ``a``.
    """
    if a == b:
        return 0

    len1, len2 = len(a), len(b)
    one = ptr1 = 0
    two = ptr2 = 0

    while one < len1 and two < len2:
        while one < len1 and not _is_alnum(a[one]):
            one += 1
        while two < len2 and not _is_alnum(b[two]):
            two += 1

        if not (one < len1 and two < len2):
            break

        # Different separator lengths decide the comparison on their own.
        sep1, sep2 = one - ptr1, two - ptr2
        if sep1 != sep2:
            return -1 if sep1 < sep2 else 1

        ptr1, ptr2 = one, two

        if _is_digit(a[ptr1]):
            while ptr1 < len1 and _is_digit(a[ptr1]):
                ptr1 += 1
            while ptr2 < len2 and _is_digit(b[ptr2]):
                ptr2 += 1
            is_num = True
        else:
            while ptr1 < len1 and _is_alpha(a[ptr1]):
                ptr1 += 1
            while ptr2 < len2 and _is_alpha(b[ptr2]):
                ptr2 += 1
            is_num = False

        seg1 = a[one:ptr1]
        seg2 = b[two:ptr2]

        if not seg1:
            return -1
        # Numeric segments are always newer than alpha segments.
        if not seg2:
            return 1 if is_num else -1

        if is_num:
            seg1 = seg1.lstrip("0")
            seg2 = seg2.lstrip("0")
            if len(seg1) > len(seg2):
                return 1
            if len(seg2) > len(seg1):
                return -1

        if seg1 != seg2:
            return -1 if seg1 < seg2 else 1

        one, two = ptr1, ptr2

    rest1 = a[one] if one < len1 else ""
    rest2 = b[two] if two < len2 else ""

    if not rest1 and not rest2:
        return 0

    # A remaining alpha string never beats an empty string.
    if (not rest1 and not _is_alpha(rest2)) or _is_alpha(rest1):
        return -1
    return 1
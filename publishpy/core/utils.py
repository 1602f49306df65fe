SIZE_SUFFIXES = ('B', 'KB', 'MB', 'GB', 'TB')


def bytes_to_size(size: int) -> str:
    """Formats a byte count with a binary suffix, rounding down (e.g. '5MB')."""
    index = 0
    while size >= 1024 and index < len(SIZE_SUFFIXES) - 1:
        size //= 1024
        index += 1
    return f"{size}{SIZE_SUFFIXES[index]}"

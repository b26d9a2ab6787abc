"""Text/binary classification and payload decoding"""

from pathlib import PurePosixPath

from charset_normalizer import from_bytes

from mdjson.core.models import RawDocument


TEXT_EXTENSIONS = {
    '.md', '.markdown', '.mdown', '.mkd', '.mdx', '.txt', '.text',
    '.json', '.yaml', '.yml', '.html', '.htm', '.xml', '.csv',
}
BINARY_EXTENSIONS = {
    '.png', '.jpg', '.jpeg', '.gif', '.bmp', '.ico', '.webp', '.tif', '.tiff',
    '.pdf', '.zip', '.gz', '.tgz', '.bz2', '.xz', '.7z', '.rar', '.tar',
    '.epub', '.mp3', '.mp4', '.mov', '.wav', '.ogg', '.webm',
    '.woff', '.woff2', '.ttf', '.otf', '.eot', '.exe', '.dll', '.so', '.bin',
}
SNIFF_BYTES = 4096


def _suffix(path: str) -> str:
    return PurePosixPath(path.replace('\\', '/')).suffix.lower()


def is_text(path: str, contents: bytes) -> bool:
    """Classify a payload by extension first, then by sniffing its leading bytes."""
    suffix = _suffix(path)
    if suffix in TEXT_EXTENSIONS:
        return True
    if suffix in BINARY_EXTENSIONS:
        return False

    chunk = contents[:SNIFF_BYTES]
    if not chunk:
        return True
    if b"\x00" in chunk:
        return False
    return from_bytes(chunk).best() is not None


async def sniff(document: RawDocument) -> bool:
    """Awaitable form of is_text; the pipeline's per-document suspension point."""
    return is_text(document.path, document.contents)


def decode_text(contents: bytes) -> str:
    """Decode as UTF-8 (BOM tolerated), falling back to the detected charset."""
    try:
        return contents.decode('utf-8-sig')
    except UnicodeDecodeError:
        pass
    best = from_bytes(contents).best()
    if best and best.encoding:
        return contents.decode(best.encoding)
    raise ValueError("Could not detect text encoding")

from .html import (
    find_api_call_path,
    find_direct_video_src,
    find_iframe_src,
    find_script_srcs,
    find_scripted_video_url,
    find_video_source,
    normalize_url,
)

__all__ = [
    "find_api_call_path",
    "find_direct_video_src",
    "find_iframe_src",
    "find_script_srcs",
    "find_scripted_video_url",
    "find_video_source",
    "normalize_url",
]

"""
语言slug到文件扩展名的映射
用于下载文件名和初始化语言表
"""

LANGUAGE_EXTENSION_MAP = {
    # Web开发
    "html": ".html",
    "css": ".css",
    "javascript": ".js",
    "typescript": ".ts",
    "php": ".php",

    # 脚本与通用语言
    "python": ".py",
    "ruby": ".rb",
    "bash": ".sh",
    "powershell": ".ps1",
    "perl": ".pl",

    # 编译型语言
    "c": ".c",
    "cpp": ".cpp",
    "csharp": ".cs",
    "go": ".go",
    "java": ".java",
    "kotlin": ".kt",
    "rust": ".rs",
    "swift": ".swift",

    # 数据与标记语言
    "json": ".json",
    "yaml": ".yaml",
    "xml": ".xml",
    "markdown": ".md",
    "sql": ".sql",

    # 默认
    "plaintext": ".txt",
}

DEFAULT_EXTENSION = ".txt"


def extension_for(language_slug) -> str:
    """根据语言slug获取文件扩展名，未知语言返回 .txt"""
    return LANGUAGE_EXTENSION_MAP.get(language_slug or "", DEFAULT_EXTENSION)


def language_for_extension(extension: str):
    """根据文件扩展名反查语言slug，找不到返回None"""
    extension = extension.lower()
    for slug, ext in LANGUAGE_EXTENSION_MAP.items():
        if ext == extension:
            return slug
    return None


def download_filename(snippet_slug: str, language_slug) -> str:
    return f"{snippet_slug}{extension_for(language_slug)}"

"""Chinese directory name -> URL slug mapping for categories and subcategories."""
from __future__ import annotations

import re
from typing import Dict

CATEGORY_SLUGS: Dict[str, str] = {
    "人工智能": "artificial-intelligence",
    "体系结构": "computer-architecture",
    "并行与分布式系统": "parallel-distributed-systems",
    "必学工具": "essential-tools",
    "操作系统": "operating-systems",
    "数学基础": "mathematics-basics",
    "数学进阶": "advanced-mathematics",
    "数据库系统": "database-systems",
    "数据科学": "data-science",
    "数据结构与算法": "data-structures-algorithms",
    "机器学习": "machine-learning",
    "机器学习系统": "machine-learning-systems",
    "机器学习进阶": "advanced-machine-learning",
    "深度学习": "deep-learning",
    "深度生成模型": "deep-generative-models",
    "电子基础": "electronics-basics",
    "系统安全": "system-security",
    "编程入门": "programming-introduction",
    "编程语言设计与分析": "programming-languages-design",
    "编译原理": "compilers",
    "计算机图形学": "computer-graphics",
    "计算机系统基础": "computer-systems-basics",
    "计算机网络": "computer-networks",
    "软件工程": "software-engineering",
    "Web开发": "web-development",
}

SUBCATEGORY_SLUGS: Dict[str, str] = {
    "Python": "python",
    "Rust": "rust",
    "Java": "java",
    "cpp": "cpp",
    "C": "c",
    "Functional": "functional",
    "大语言模型": "large-language-models",
}

SLUGS: Dict[str, str] = {**CATEGORY_SLUGS, **SUBCATEGORY_SLUGS}
REVERSE_SLUGS: Dict[str, str] = {slug: name for name, slug in SLUGS.items()}

_WHITESPACE = re.compile(r"\s+")


def get_english_slug(name: str) -> str:
    """Return the mapped slug, or the name lowercased with whitespace runs replaced by '-'."""
    return SLUGS.get(name) or _WHITESPACE.sub("-", name.lower())


def get_chinese_name(slug: str) -> str:
    return REVERSE_SLUGS.get(slug, slug)

from pathlib import Path

import pytest

CS61A_ZH = """# CS61A: 计算机程序的构造和解释

## 课程简介

- 所属大学：UC Berkeley
- 先修要求：无
- 编程语言：Python, Scheme, SQL
- 课程难度：🌟🌟
- 预计学时：50 小时

伯克利 CS61 系列的第一门课程，也是我的编程入门课。

## 课程资源

- 课程网站：cs61a.org
"""

CS61A_EN = """# CS61A: Structure and Interpretation of Computer Programs

## Descriptions

- Offered by: UC Berkeley
- Prerequisites: None
- Programming Languages: Python, Scheme, SQL
- Difficulty: 🌟🌟
- Class Hour: 50 hours

The first course of the Berkeley CS61 series and my introduction to programming.

## Course Resources
"""

CS61B_ZH = """# CS61B: 数据结构与算法

## 课程简介

- 所属大学：UC Berkeley
- 编程语言：Java
- 课程难度：🌟🌟🌟
- 预计学时：60 小时

伯克利 CS61 系列的第二门课程，注重数据结构与算法的设计。

## 课程资源
"""

CS61B_EN = """# CS61B: Data Structures

## Descriptions

- Offered by: UC Berkeley
- Programming Languages: Java
- Difficulty: 🌟🌟🌟🌟🌟
- Class Hour: 60 hours

The second course of the CS61 series, focusing on **data structures** and [algorithms](algorithms.md).

## Course Resources
"""

DUKE_ZH = """# Duke University: Introductory C Programming

杜克大学的 C 语言入门专项课程。
"""

CS142_EN = """# Stanford CS142: Web Applications

## Descriptions

- Offered by: Stanford
- Programming Languages: JavaScript, HTML, CSS
- Difficulty: 🌟🌟🌟🌟
- Class Hour: 100 hours

Web application development from the browser to the database.
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def docs_tree(tmp_path: Path) -> Path:
    """Single tree using the <name>.md / <name>.en.md convention."""
    root = tmp_path / "docs"
    write(root / "编程入门" / "Python" / "CS61A.md", CS61A_ZH)
    write(root / "编程入门" / "Python" / "CS61A.en.md", CS61A_EN)
    write(root / "编程入门" / "C" / "Duke-Coursera.md", DUKE_ZH)
    write(root / "数据结构与算法" / "CS61B.md", CS61B_ZH)
    write(root / "数据结构与算法" / "CS61B.en.md", CS61B_EN)
    write(root / "images" / "notes.md", "# not a course\n")
    write(root / "README.md", "# Root readme\n")
    return root


@pytest.fixture
def locale_tree(tmp_path: Path) -> Path:
    """zh/ and en/ trees holding same-named files per language."""
    root = tmp_path / "docs-new"
    write(root / "zh" / "编程入门" / "Python" / "CS61A.md", CS61A_ZH)
    write(root / "en" / "编程入门" / "Python" / "CS61A.md", CS61A_EN)
    write(root / "zh" / "数据结构与算法" / "CS61B.md", CS61B_ZH)
    write(root / "en" / "Web开发" / "CS142.md", CS142_EN)
    return root

#!/usr/bin/env python3
"""統一的檢查腳本，執行所有 linter、格式化檢查與測試。

依序執行：
1. Black 格式化檢查
2. isort 匯入排序檢查
3. Ruff 靜態檢查
4. Pylint 靜態分析
5. pytest 單元測試

加上 --fast 只執行格式化與 Ruff。
"""

from pathlib import Path
import subprocess
import sys

ROOT = Path(__file__).parent
PACKAGES = ["app", "core", "infrastructure", "main.py"]

CHECKS: list[tuple[list[str], str, bool]] = [
    ([sys.executable, "-m", "black", ".", "--check"], "Black 格式化檢查", True),
    ([sys.executable, "-m", "isort", ".", "--check-only"], "isort 匯入排序檢查", True),
    ([sys.executable, "-m", "ruff", "check", "."], "Ruff 靜態檢查", True),
    ([sys.executable, "-m", "pylint", *PACKAGES], "Pylint 靜態分析", False),
    ([sys.executable, "-m", "pytest", "-q"], "pytest 單元測試", False),
]


def run_check(cmd: list[str], description: str) -> tuple[bool, str]:
    """執行單一檢查並回傳 (是否成功, 輸出)。"""
    print(f"\n{'=' * 60}\n{description}: {' '.join(cmd[1:])}\n{'=' * 60}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False, cwd=ROOT)
    except OSError as e:
        print(f"❌ 無法執行: {e}")
        return False, str(e)

    output = (result.stdout + result.stderr).strip()
    ok = result.returncode == 0
    print("✅ 成功" if ok else "❌ 失敗")
    if output:
        print(output)
    return ok, output


def main(argv: list[str]) -> int:
    fast = "--fast" in argv
    results = [
        (description, *run_check(cmd, description))
        for cmd, description, in_fast in CHECKS
        if in_fast or not fast
    ]

    print(f"\n{'=' * 60}\n總結報告\n{'=' * 60}")
    for description, ok, _ in results:
        print(f"{description}: {'✅ 通過' if ok else '❌ 失敗'}")
    all_passed = all(ok for _, ok, _ in results)
    print(f"\n整體結果: {'✅ 全部通過' if all_passed else '❌ 有錯誤'}")
    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))

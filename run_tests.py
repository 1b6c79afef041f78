#!/usr/bin/env python3
"""
TouristSafe 테스트 실행 스크립트

테스트 그룹(core, orchestrators, adapters ...)별로 pytest를 실행합니다.
"""

import os
import sys
import subprocess
import argparse
from pathlib import Path

# 그룹 이름 -> (pytest 인자, 설명)
GROUPS = {
    "all": (["tests/"], "전체 테스트"),
    "unit": (["tests/unit/"], "단위 테스트"),
    "integration": (["-m", "integration", "tests/"], "통합 테스트"),
    "core": (["tests/unit/core/"], "Core 모듈 테스트"),
    "common": (["tests/unit/common/"], "Common 모듈 테스트"),
    "adapters": (["tests/unit/adapters/"], "Adapters 모듈 테스트"),
    "orchestrators": (["tests/unit/orchestrators/"], "Orchestrators 모듈 테스트"),
    "features": (["tests/unit/features/"], "Features 모듈 테스트"),
    "observability": (["tests/unit/observability/"], "Observability 모듈 테스트"),
}


def run_pytest(args, description):
    """pytest 실행"""
    cmd = [sys.executable, "-m", "pytest", *args]
    print(f"\n{'='*60}")
    print(f"실행 중: {description}")
    print(f"명령어: {' '.join(cmd)}")
    print(f"{'='*60}")

    result = subprocess.run(cmd)
    print("성공" if result.returncode == 0 else "실패")
    return result.returncode == 0


def main():
    """메인 함수"""
    parser = argparse.ArgumentParser(description="TouristSafe 테스트 실행")
    parser.add_argument("--type", choices=sorted(GROUPS), default="all", help="실행할 테스트 그룹")
    parser.add_argument("--coverage", action="store_true", help="코드 커버리지 포함")
    parser.add_argument("--verbose", action="store_true", help="상세 출력")
    parser.add_argument("--parallel", action="store_true", help="병렬 실행")
    args = parser.parse_args()

    # 프로젝트 루트 디렉토리로 이동
    os.chdir(Path(__file__).parent)

    opts = []
    if args.verbose:
        opts.append("-v")
    if args.coverage:
        opts.extend(["--cov=touristsafe", "--cov-report=html", "--cov-report=term"])
    if args.parallel:
        opts.extend(["-n", "auto"])

    targets, description = GROUPS[args.type]
    ok = run_pytest(opts + targets, description)

    print(f"\n{'='*60}")
    if not ok:
        print("일부 테스트가 실패했습니다.")
        sys.exit(1)
    print("모든 테스트가 성공적으로 완료되었습니다!")
    print(f"{'='*60}")


if __name__ == "__main__":
    main()

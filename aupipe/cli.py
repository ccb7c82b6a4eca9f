"""
aupipe CLI
"""
import argparse
import json
import logging
import sys
from pathlib import Path


def main(argv=None) -> int:
    """メインエントリーポイント"""
    parser = argparse.ArgumentParser(
        prog="aupipe",
        description="Single-frame facial Action Unit inference",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="DEBUGログを表示")

    subparsers = parser.add_subparsers(dest="command", help="コマンド")

    # analyze コマンド
    analyze_parser = subparsers.add_parser("analyze", aliases=["a"], help="画像のAU強度を推定")
    analyze_parser.add_argument("input", type=str, help="入力画像パス")
    analyze_parser.add_argument("-m", "--models", type=str, default=None,
                                help="モデルディレクトリ（既定: $AUPIPE_MODELS_PATH）")
    analyze_parser.add_argument("--dlib", action="store_true", help="dlibのランドマーク検出器を使用")
    analyze_parser.add_argument("-j", "--json", action="store_true", help="JSON出力")

    # list コマンド
    subparsers.add_parser("list", aliases=["l"], help="AU一覧")

    # version コマンド
    subparsers.add_parser("version", aliases=["v"], help="バージョン表示")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command in ("version", "v"):
        from aupipe import __version__
        print(f"aupipe {__version__}")
        return 0

    if args.command in ("list", "l"):
        from aupipe.config import AU_DEFINITIONS
        for au in AU_DEFINITIONS.values():
            print(f"{au.key}: {au.name} - {au.description} ({au.muscular_basis})")
        return 0

    if args.command in ("analyze", "a"):
        return _analyze(args)

    return 0


def _analyze(args) -> int:
    """推論を実行"""
    import cv2
    from aupipe import create_pipeline, AUPipelineError, DetectorType, PipelineConfig
    from aupipe.config import default_models_path

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"ファイルが見つかりません: {args.input}", file=sys.stderr)
        return 1

    models_path = args.models or default_models_path()
    if not models_path:
        print("モデルディレクトリを -m または AUPIPE_MODELS_PATH で指定してください", file=sys.stderr)
        return 1

    image = cv2.imread(str(input_path))
    if image is None:
        print(f"画像を読み込めません: {args.input}", file=sys.stderr)
        return 1

    config = PipelineConfig(detector_type=DetectorType.DLIB if args.dlib else DetectorType.MEDIAPIPE)
    try:
        with create_pipeline(models_path, config) as pipeline:
            aus = pipeline.infer(image)
    except AUPipelineError as e:
        print(f"エラー: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(aus, indent=2, ensure_ascii=False))
    else:
        for name, value in aus.items():
            print(f"{name}: {value:.2f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

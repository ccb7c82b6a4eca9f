"""例外定義"""


class AUPipelineError(Exception):
    """aupipe の基底例外"""


class InvalidShapeError(AUPipelineError, ValueError):
    """入力画像が H x W x 3 の8bitバッファでない"""


class EmptyFrameError(AUPipelineError, ValueError):
    """サイズ0のフレームが渡された"""


class ModelLoadError(AUPipelineError, RuntimeError):
    """モデルの読み込みに失敗した（構築時のみ発生）"""


class NoModelsLoadedError(ModelLoadError):
    """AUモデルが1つも見つからない"""


class PipelineClosedError(AUPipelineError, RuntimeError):
    """close() 済みのパイプラインが使用された"""

"""TGAコーデックの例外定義

デコード・エンコード処理で発生するエラーの型を定義する。
不正な入力（ヘッダー欠損、データ途切れ）と、形式としては正しいが
未対応の入力（ビット深度、画像タイプ）を区別できるように分類している。
"""


class TGAError(Exception):
    """TGAコーデックの基底例外"""

    pass


class MissingHeaderError(TGAError):
    """18バイトのファイルヘッダーを読み取れない"""

    pass


class UnsupportedBitdepthError(TGAError):
    """対応していないビット深度（16/24/32以外）"""

    def __init__(self, depth: int) -> None:
        super().__init__(f"対応していないビット深度です: {depth}")
        self.depth = depth


class UnsupportedImageFormatError(TGAError):
    """対応していない画像タイプ（カラーマップ、白黒、Huffman圧縮等）"""

    def __init__(self, image_type: int) -> None:
        super().__init__(f"対応していない画像タイプです: {int(image_type)}")
        self.image_type = image_type


class UnexpectedEOFError(TGAError):
    """ピクセルデータの途中でストリームが終端に達した"""

    pass


class ZeroRunLengthError(TGAError):
    """RLEエンコード中にラン長が0になった

    空でないバッファでは発生しない内部不変条件違反。
    """

    pass


class InvalidImageSizeError(TGAError):
    """ヘッダーの幅または高さが0"""

    def __init__(self, width: int, height: int) -> None:
        super().__init__(f"画像サイズが不正です: {width}x{height}")
        self.width = width
        self.height = height

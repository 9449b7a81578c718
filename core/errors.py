# -*- coding: utf-8 -*-
"""
MPR 相关异常。
仅体数据拼装会抛出；切片、投影与调窗以返回 None 表示不可计算。
"""


class MPREngineError(Exception):
    """MPR 异常基类。"""
    pass


class InsufficientSlicesError(MPREngineError):
    def __init__(self, count: int = 0):
        super().__init__(f"至少需要 2 层切片才能构建体数据（当前 {count} 层）")
        self.count = count


class InconsistentDimensionsError(MPREngineError):
    def __init__(self):
        super().__init__("所有切片的图像尺寸必须一致")


class MissingPixelDataError(MPREngineError):
    def __init__(self, detail: str = ""):
        message = "无法从 DICOM 文件中提取像素数据"
        if detail:
            message = f"{message}：{detail}"
        super().__init__(message)


class VolumeBuildError(MPREngineError):
    def __init__(self, reason: str):
        super().__init__(f"构建体数据失败：{reason}")
        self.reason = reason

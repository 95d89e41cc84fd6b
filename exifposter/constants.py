STANDARD_EXTENSIONS = {".jpg", ".jpeg", ".png", ".tif", ".tiff", ".webp", ".bmp"}
HEIF_EXTENSIONS = {".heic", ".heif", ".hif"}
SUPPORTED_EXTENSIONS = STANDARD_EXTENSIONS | HEIF_EXTENSIONS

# 缺失的元数据字段统一用这个字面量占位，渲染层只做相等判断
UNKNOWN = "unknown"

DEFAULT_TEMPLATE_ID = "classic"
CLASSIC_TEMPLATE_ID = "classic"
BLUR_BACKGROUND_TEMPLATE_ID = "blur-background"

DEFAULT_JPEG_QUALITY = 0.9

DEFAULT_NAME_SUFFIX = "_poster"

# 0.299R + 0.587G + 0.114B below this mean luma -> white text
TEXT_LUMA_THRESHOLD = 0.45

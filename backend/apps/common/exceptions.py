"""
业务异常体系（BizError）

约定与作用：
- 所有“预期内的业务错误”都继承 BizError，避免直接抛框架异常
- 统一错误码/HTTP 状态/提示语，便于前后端对齐
- 系统级错误（代码 bug、数据库故障等）由全局异常处理器按 500 处理

错误码规范：
- 0                : 成功（只出现在正常响应里）
- 40000~40099      : 通用请求 / 参数错误（Validation、BadRequest）
- 40100~40199      : 认证错误（未登录、凭证无效）
- 40300~40399      : 权限错误（无权限访问某资源/操作）
- 40400~40499      : 资源不存在（媒体文件等）
- 42900~42999      : 频率限制（节流 / 风控）
- 48000~48099      : 题目相关错误（题目不存在/已删除等）
- 50300~50399      : 基础设施/第三方依赖不可用（存储、校验服务等）

使用方式：
- 业务层抛 BizError 或子类；全局异常处理器读取 exc.code/message/http_status/extra 构造统一响应
"""


class BizError(Exception):
    """
    所有业务异常的基类

    设计要点：
    - 不耦合 DRF / Response，只是纯数据和语义；
    - 子类只需覆盖 default_code / default_message / http_status；
    - 也可以在 __init__ 时传入自定义 message / code / extra 做覆盖
    """

    #: 子类可覆盖的默认错误码
    default_code: int = 40000

    #: 子类可覆盖的默认提示信息
    default_message: str = "业务错误"

    #: 子类可覆盖的建议 HTTP 状态码（交给异常处理器用）
    http_status: int = 400

    def __init__(self, message: str | None = None, code: int | None = None, *, extra: dict | None = None):
        self.code = code if code is not None else self.default_code
        self.message = message if message is not None else self.default_message
        self.extra = extra or {}
        super().__init__(self.message)

    def __str__(self) -> str:  # 方便日志输出
        return f"[{self.code}] {self.message}"


# ======================
# 通用类错误
# ======================

class BadRequestError(BizError):
    """
    通用的 400 错误：
    - 无法解析的请求
    - 请求格式错误/缺少头信息等
    """
    default_code = 40001
    default_message = "错误的请求"
    http_status = 400


class ValidationError(BizError):
    """
    参数校验 / 请求数据不合法：
    - 字段类型错误
    - 字段取值超出允许范围
    """
    default_code = 40002
    default_message = "请求参数不合法"
    http_status = 400


class NotFoundError(BizError):
    """
    通用资源不存在：
    - 某个路径/ID 对应的资源未找到
    """
    default_code = 40400
    default_message = "资源不存在"
    http_status = 404


class MediaNotFoundError(NotFoundError):
    """媒体目录下不存在请求的文件"""
    default_code = 40401
    default_message = "文件不存在"


class RateLimitError(BizError):
    """触发频率限制 / 风控"""
    default_code = 42900
    default_message = "请求过于频繁，请稍后再试"
    http_status = 429


# ======================
# 认证 / 授权相关
# ======================

class AuthError(BizError):
    """
    认证相关错误（未登录、凭证无效）：
    - 统一归类为 401xx
    """
    default_code = 40100
    default_message = "认证失败"
    http_status = 401


class PermissionDeniedError(BizError):
    """
    权限不足：
    - 普通用户访问管理员接口
    """
    default_code = 40300
    default_message = "无权限进行该操作"
    http_status = 403


# ======================
# 题目领域错误
# ======================

class ChallengeError(BizError):
    """题目相关通用错误基类"""
    default_code = 48000
    default_message = "题目相关错误"
    http_status = 400


class ChallengeNotFoundError(ChallengeError):
    """
    题目不存在或已被软删除：
    - 面向调用方属于请求错误（bad request），不是服务端故障
    - 不做自动重试
    """
    default_code = 48020
    default_message = "challenge_not_found"


# ======================
# 基础设施 / 第三方服务错误
# ======================

class InfrastructureError(BizError):
    """
    基础设施或第三方依赖不可用：
    - 文件存储 / 外部服务故障
    """
    default_code = 50300
    default_message = "系统服务暂时不可用，请稍后重试"
    http_status = 503


class StorageUnavailableError(InfrastructureError):
    """
    文件存储不可用（本地磁盘权限/空间等）
    """
    default_code = 50303
    default_message = "文件存储服务暂时不可用，请稍后重试"
    http_status = 503

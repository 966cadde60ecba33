from django.apps import AppConfig


class CommonConfig(AppConfig):
    """
    Common 应用配置：
    - 承载全局基础设施（异常、响应、日志、媒体存储）与管理命令，不定义模型
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.common'
    label = 'common'
    verbose_name = "Common"

    def ready(self):
        """
        Django 启动完成后的钩子：按 settings 重建日志配置
        - 只做无数据库访问的初始化；媒体目录在首次使用时或通过 init_media 命令引导
        """
        from apps.common.infra.logger import configure_logging, get_log_path_from_settings

        configure_logging(force=True, log_file_path=get_log_path_from_settings())

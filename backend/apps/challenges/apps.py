from django.apps import AppConfig


class ChallengesConfig(AppConfig):
    """
    Challenges 应用配置：
    - 题目主键为 UUID（在模型上显式声明），其余模型沿用 BigAutoField
    """

    default_auto_field = 'django.db.models.BigAutoField'  # 默认主键类型
    name = 'apps.challenges'  # 应用路径
    label = 'challenges'  # 应用标签
    verbose_name = "Challenges"  # 应用在后台显示的名称

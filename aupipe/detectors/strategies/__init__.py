from .au_strategies import (
    BaseAUStrategy,
    AU1Strategy, AU2Strategy, AU4Strategy, AU5Strategy, AU6Strategy,
    AU7Strategy, AU9Strategy, AU10Strategy, AU12Strategy, AU14Strategy,
    AU15Strategy, AU17Strategy, AU20Strategy, AU23Strategy, AU25Strategy,
    AU26Strategy, AU45Strategy,
    get_all_strategies,
)

__all__ = [
    'BaseAUStrategy',
    'AU1Strategy', 'AU2Strategy', 'AU4Strategy', 'AU5Strategy', 'AU6Strategy',
    'AU7Strategy', 'AU9Strategy', 'AU10Strategy', 'AU12Strategy', 'AU14Strategy',
    'AU15Strategy', 'AU17Strategy', 'AU20Strategy', 'AU23Strategy', 'AU25Strategy',
    'AU26Strategy', 'AU45Strategy',
    'get_all_strategies',
]

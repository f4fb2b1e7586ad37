from .aur import Yay
from .flatpak import Flatpak
from .packages import installed_package, is_installed

__all__ = [
	'Flatpak',
	'Yay',
	'installed_package',
	'is_installed',
]

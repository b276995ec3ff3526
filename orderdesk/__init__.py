"""
                        OrderDesk

Order-taking backend for a food-delivery app: order lifecycle,
admin status management and Expo push notifications.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"

#!/usr/bin/env python3
"""
Commission Calculator Bot - Main Entry Point
"""

import logging
from telebot import TeleBot

from commission_bot.config import BOT_TOKEN, REPLY_TIMEOUT, check_config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def main():
    """Initialize and start the bot"""
    check_config()

    # Initialize bot without FSM storage (using our own FSM)
    bot = TeleBot(BOT_TOKEN, parse_mode="HTML")

    # Import and initialize handlers
    from commission_bot.handlers import start, calculator, history

    # Initialize all handlers with bot instance
    start.init_bot(bot)
    calculator.init_bot(bot)
    history.init_bot(bot)

    logger.info("Bot started successfully")

    # Start polling
    try:
        bot.infinity_polling(timeout=REPLY_TIMEOUT)
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error(f"Bot error: {e}")
        raise

if __name__ == "__main__":
    main()

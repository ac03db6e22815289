"""Constants and configuration values for the image chat package."""

import os

# Intake limits
MAX_IMAGES = 5
MAX_FILE_SIZE = 20 * 1024 * 1024  # 20 MiB raw file
MAX_BASE64_SIZE = 4 * 1024 * 1024  # 4 MiB request limit on the encoded image
MAX_PIXELS = 33177600  # ~33 megapixels

# Request assembly
RESIZE_MAX_WIDTH = 800
JPEG_QUALITY = 60
IMAGE_MIME_TYPE = "image/jpeg"
DEFAULT_PROMPT = "What's in this image?"

# Chat completion (OpenAI-compatible endpoint, Groq by default)
CHAT_API_URL = "https://api.groq.com/openai/v1/chat/completions"
CHAT_API_URL_ENV = "CHAT_API_URL"
CHAT_API_KEY_ENV = "GROQ_API_KEY"
CHAT_MODEL = "meta-llama/llama-4-scout-17b-16e-instruct"
CHAT_MODEL_ENV = "CHAT_MODEL"
CHAT_TEMPERATURE = 1
CHAT_MAX_COMPLETION_TOKENS = 1024
CHAT_TOP_P = 1
DEFAULT_TIMEOUT = 60  # seconds

# Ollama backend
OLLAMA_HOST = "http://localhost:11434"
OLLAMA_HOST_ENV = "OLLAMA_HOST"
OLLAMA_MODEL = "llama3.2-vision"
OLLAMA_MODEL_ENV = "OLLAMA_MODEL"
BACKENDS = ["groq", "ollama"]
DEFAULT_BACKEND = "groq"

# Slack
SLACK_TOKEN_ENV = "SLACK_BOT_TOKEN"
SHARE_IMAGE_TOOL_NAME = "share_image_to_slack"
SYSTEM_PROMPT = """
You are a helpful assistant that describes and compares images.
The user message lists the attached images as "Image 1", "Image 2" and so on, in the order they are attached.
If the user asks you to post, share or send one of the images to Slack, call the share_image_to_slack tool
with the number of the image as image_index and the channel the user named. Otherwise answer in plain text.
"""

# File paths
DEFAULT_OUTPUT_DIR = "results"
LOG_DIR = "logs"
LOG_FILE = os.path.join(LOG_DIR, "image_chat.log")

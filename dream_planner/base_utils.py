# dream_planner/base_utils.py

import logging
import re

import commentjson
import yaml

from dream_planner import settings
from dream_planner.llm_client import LlmClient


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s\n%(message)s\n"
)

logger = logging.getLogger("dream_planner")


class BaseUtils():
    llm_timeout: float = settings.LLM_TIMEOUT

    # -----------------------
    # General Utils
    # -----------------------

    def color_print(self, text, color=None, level=logging.INFO):
        COLOR_CODES = {
            'black': '30', 'red': '31', 'green': '32', 'yellow': '33', 'blue': '34', 'magenta': '35',
            'cyan': '36', 'white': '37', 'bright_black': '90', 'bright_red': '91', 'bright_green': '92',
            'bright_yellow': '93', 'bright_blue': '94', 'bright_magenta': '95', 'bright_cyan': '96', 'bright_white': '97'
        }
        if color and color.lower() in COLOR_CODES:
            color_code = COLOR_CODES[color.lower()]
            start = f"\033[{color_code}m"
            end = "\033[0m"
            text = f"{start}{text}{end}"
        logger.log(level, str(text))
        return False

    def clean_triple_backticks(self, code) -> str:
        pattern = r'```[a-zA-Z]*\n?|```\n?'
        return re.sub(pattern, '', code)

    def extract_fenced_block(self, text: str) -> str:
        """
        Returns the JSON payload of a fenced ```json ... ``` block when there is one,
        otherwise the text with any stray fences removed.
        """
        text = (text or "").strip()
        if "```" not in text:
            return text
        match = re.search(r"```(?:[a-zA-Z]+)?\s*([\[{][\s\S]*?[\]}])\s*```", text)
        if match:
            return match.group(1)
        return self.clean_triple_backticks(text).strip()

    def unsafe_string_format(self, dest_string, print_unused_keys_report=True, **kwargs):
        """
        Formats a destination string by replacing placeholders with corresponding values from kwargs.

        It works differently from the standard "format" method as instead of looking for all the
        potential keys, looks only for the keys as passed in kwargs, so literal braces in the
        template (JSON examples) survive untouched.
        """
        missing_keys = []

        def replacer(match):
            key = match.group(1)
            if key in kwargs:
                return str(kwargs[key])
            missing_keys.append(key)
            return match.group(0)

        pattern = re.compile(r'\{(\w+)\}')
        result = pattern.sub(replacer, dest_string)
        if missing_keys and print_unused_keys_report:
            logger.info(f"\033[93m\033[3mMissing keys within string-to-format in unsafe_string_format: {', '.join(missing_keys)}\033[0m")
        return result

    def load_fault_tolerant_json(self, json_str):
        """
        Attempts to load a JSON-like string, falling back to pyyaml and then to json_repair.
        Raises when nothing usable comes out.
        """
        def sanitize_json_string(input_str):
            def process_string_segment(match):
                content = match.group(1)
                content = re.sub(r'(?<!\\)\\(?![bfnrtu"\\/])', r'\\\\', content)
                content = re.sub(r'(?<!\\)\n', r'\\n', content)
                return f'"{content}"'

            input_str = self.clean_triple_backticks(input_str)
            input_str = re.sub(r'^\s*//.*?$|/\*.*?\*/', '', input_str, flags=re.MULTILINE | re.DOTALL)
            return re.sub(r'(?<!\\)"((?:[^"\\]|\\.)*?)"', process_string_segment, input_str, flags=re.DOTALL)

        def load_json(json_str):
            err, data = "", None
            try:
                data = commentjson.loads(self.clean_triple_backticks(json_str))
                return data, ""
            except Exception as e:
                err = str(e)
                data = None
            try:
                data = yaml.safe_load(sanitize_json_string(json_str))
                if isinstance(data, str):
                    raise ValueError("load_fault_tolerant_json: YAML parsing produced a bare string.")
                return data, ""
            except Exception as e:
                err += "\n--\n" + str(e)
                data = None
            return data, err

        data, err = load_json(json_str)
        if data:
            return data
        from json_repair import repair_json
        repaired_json_str = repair_json(json_str)
        r_data, r_err = load_json(repaired_json_str)
        if r_data:
            return r_data
        raise ValueError(f"load_fault_tolerant_json: JSON parsing failed: {r_err or err} \n- Original JSON: {json_str}")

    # -----------------------
    # LLM base plumbing
    # -----------------------

    def _build_llm_for_model(self, model_name: str, timeout: float | None = None):
        """
        Build a per-request LLM instance for the given model name.
        Falls back to None if creation fails.
        """
        if not timeout:
            timeout = self.llm_timeout
        try:
            return LlmClient(
                model_name=model_name,
                vertex_project=settings.PROJECT_ID,
                vertex_region=settings.REGION,
                timeout=timeout,
            )
        except Exception as e:
            logger.info(f"Warning: Could not initialize LLM {model_name}: {e}. ")
            return None

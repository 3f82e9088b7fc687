"""Centralized error handling for pipeline boundaries and Streamlit pages."""
import streamlit as st
import traceback
import functools
from typing import Callable, Any
from mapsearch.utils.logging import log_error


def handle_streamlit_errors(show_details: bool = True, reraise: bool = False):
    """
    Decorator to handle errors in Streamlit pages.
    
    Args:
        show_details: Whether to show error details in expander
        reraise: Whether to re-raise the exception (for development)
    
    Usage:
        @handle_streamlit_errors()
        def render_page():
            # Your code here
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                log_error(e, {
                    "module": func.__module__,
                    "function": func.__name__,
                    "streamlit_page": True,
                })
                
                st.error(f"❌ An error occurred: {str(e)}")
                
                if show_details:
                    with st.expander("🔍 Error Details (for debugging)", expanded=False):
                        st.code(traceback.format_exc(), language="python")
                
                if reraise:
                    raise
        
        return wrapper
    return decorator


def safe_execute(func: Callable, *args, default_return: Any = None, **kwargs) -> Any:
    """
    Safely execute a function and return default value on error.
    
    Args:
        func: Function to execute
        *args: Positional arguments
        default_return: Value to return on error
        **kwargs: Keyword arguments
    
    Returns:
        Function result or default_return on error
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        log_error(e, {
            "module": getattr(func, '__module__', 'unknown'),
            "function": getattr(func, '__name__', 'unknown'),
            "safe_execute": True,
        }, level="warning")
        return default_return


def catch_and_log(func: Callable) -> Callable:
    """
    Decorator to catch and log errors without stopping execution.
    
    Usage:
        @catch_and_log
        def on_commit(location):
            # Your code here
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            log_error(e, {
                "module": getattr(func, '__module__', 'unknown'),
                "function": getattr(func, '__name__', 'unknown'),
                "catch_and_log": True,
            })
            return None
    
    return wrapper

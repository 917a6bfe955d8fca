"""
Base Pipeline Component Module

This module provides the base class for pipeline steps.
"""

import logging
import time
import traceback
from abc import ABC, abstractmethod

from ..errors import PipelineError

logger = logging.getLogger(__name__)

class PipelineComponent(ABC):
    """Abstract base class for a per-table pipeline step"""

    def __init__(self, name):
        """
        Initialize the pipeline component

        Args:
            name (str): Component name
        """
        self.name = name

    def applies_to(self, unit):
        """Whether this step has anything to do for a unit"""
        return True

    def process(self, unit):
        """
        Run this step for one table

        Errors are captured in the result rather than raised so the
        orchestrator can apply its error policy.

        Args:
            unit (TableExportUnit): Table to process

        Returns:
            dict: Processing results
        """
        logger.info(f"Processing table '{unit.table_name}' with component '{self.name}'")

        start_time = time.time()
        result = {
            'component': self.name,
            'table': unit.table_name,
            'success': False,
            'time': 0,
            'message': ''
        }

        try:
            process_result = self.process_table(unit)
            result.update(process_result)

            execution_time = time.time() - start_time
            result['time'] = f"{execution_time:.2f}s"

            if result.get('success', False):
                logger.info(f"Component '{self.name}' processed '{unit.table_name}' successfully in {result['time']}")
            else:
                logger.warning(f"Component '{self.name}' failed to process '{unit.table_name}' in {result['time']}")

            return result

        except PipelineError as e:
            execution_time = time.time() - start_time
            logger.error(f"Error in component '{self.name}' processing '{unit.table_name}': {str(e)}")

            result.update({
                'success': False,
                'time': f"{execution_time:.2f}s",
                'message': f"Error: {str(e)}",
                'error': type(e).__name__,
            })
            return result

        except Exception as e:
            execution_time = time.time() - start_time
            logger.error(f"Unexpected error in component '{self.name}' processing '{unit.table_name}': {str(e)}")
            logger.debug(traceback.format_exc())

            result.update({
                'success': False,
                'time': f"{execution_time:.2f}s",
                'message': f"Error: {str(e)}",
                'error': type(e).__name__,
            })
            return result

    @abstractmethod
    def process_table(self, unit):
        """
        Run the step (to be implemented by subclasses)

        Args:
            unit (TableExportUnit): Table to process

        Returns:
            dict: At least 'success' and 'message'
        """
        pass

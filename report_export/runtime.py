"""
Embedded runtime

Exported documents carry a JSON config island and a small JavaScript program.
At DOM-ready the program parses the island, freezes it and passes it to
``ReportRuntime.init``, which loads data, binds widgets, draws charts and
optionally prints. The program is a Jinja2 template: its prologue receives the
constants shared with the Python renderers and binders, the body is fixed.
"""
from functools import lru_cache
from typing import Any, Dict, Iterable, Optional

from core.config import Settings, get_settings
from report_export.formatting import DATE_TOKEN_PATTERN, DAY_NAMES, DEFAULT_FORMATS, MONTH_NAMES
from report_export.models import ExportOptions, RuntimeComponentConfig
from report_export.renderers.chart import DEFAULT_CHART_COLORS, DEFAULT_DATA_POINTS
from report_export.renderers.status import GAUGE_ARC_FRACTION, GAUGE_STROKE_WIDTH, STATUS_STYLES
from report_export.templating import TemplateEngine

RUNTIME_CONFIG_ELEMENT_ID = "report-runtime-config"
RUNTIME_TEMPLATE_NAME = "runtime.js"

RUNTIME_TEMPLATE = r"""// ReportBuilder runtime
(function () {
  'use strict';

  var CONFIG_ELEMENT_ID = {{ config_element_id|tojson }};
  var STATUS_STYLES = {{ status_styles|tojson }};
  var DATE_FORMATS = {{ date_formats|tojson }};
  var MONTH_NAMES = {{ month_names|tojson }};
  var DAY_NAMES = {{ day_names|tojson }};
  var DATE_TOKEN_PATTERN = {{ date_token_pattern|tojson }};
  var CHART_COLORS = {{ chart_colors|tojson }};
  var DEFAULT_DATA_POINTS = {{ default_data_points|tojson }};
  var GAUGE_STROKE_WIDTH = {{ gauge_stroke_width|tojson }};
  var GAUGE_ARC_FRACTION = {{ gauge_arc_fraction|tojson }};
{% raw %}
  var LOG_PREFIX = '[ReportRuntime]';
  var BINDING_PATTERN = /\{\{([^}]+)\}\}/g;
  var NUMBER_PREFIX = /^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?/;
  var ISO_DATE = /^(\d{4})-(\d{2})-(\d{2})(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?)?(?:Z|[+-]\d{2}:?\d{2})?$/;
  var CONDITION_TOKEN = /^(?:(\s+)|(===|!==|==|!=|>=|<=|&&|\|\||[<>!()])|('(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")|(-?(?:\d+\.?\d*|\.\d+))|([A-Za-z_$][\w$]*(?:\??\.[\w$]+)*))/;
  var COMPARISON_OPERATORS = ['===', '!==', '==', '!=', '>=', '<=', '>', '<'];
  var KEYWORDS = { 'true': true, 'false': false, 'null': null, 'undefined': null };

  function log(level, message, detail) {
    var method = console[level] || console.log;
    if (detail === undefined) {
      method.call(console, LOG_PREFIX + ' ' + message);
    } else {
      method.call(console, LOG_PREFIX + ' ' + message, detail);
    }
  }

  function deepFreeze(value) {
    if (value && typeof value === 'object' && !Object.isFrozen(value)) {
      Object.freeze(value);
      Object.keys(value).forEach(function (key) { deepFreeze(value[key]); });
    }
    return value;
  }

  function clone(value) {
    return value == null ? value : JSON.parse(JSON.stringify(value));
  }

  // Values

  function isObject(value) {
    return value !== null && typeof value === 'object' && !Array.isArray(value);
  }

  function toDisplayString(value) {
    if (value == null) return '';
    if (typeof value === 'string') return value;
    if (typeof value === 'object') return JSON.stringify(value);
    return String(value);
  }

  function escapeHtml(value) {
    return toDisplayString(value)
      .replace(/&/g, '&amp;')
      .replace(/</g, '&lt;')
      .replace(/>/g, '&gt;')
      .replace(/"/g, '&quot;')
      .replace(/'/g, '&#039;');
  }

  function coerceNumber(value) {
    if (value == null || typeof value === 'boolean') return null;
    if (typeof value === 'number') return isNaN(value) ? null : value;
    if (typeof value === 'string') {
      var match = NUMBER_PREFIX.exec(value);
      return match ? parseFloat(match[0]) : null;
    }
    return null;
  }

  function toFixed(value, digits) {
    var text = Number(value).toFixed(digits);
    return /^-0(\.0*)?$/.test(text) ? text.slice(1) : text;
  }

  function clampPercentage(value, min, max) {
    if (max === min) return 0;
    return Math.min(100, Math.max(0, ((value - min) / (max - min)) * 100));
  }

  // Bindings

  function normalizePath(path) {
    path = String(path).trim();
    return path.indexOf('data.') === 0 ? path.slice(5) : path;
  }

  function resolvePath(path, data) {
    if (!path || data == null) return null;
    var parts = normalizePath(path).split('.');
    var current = data;
    for (var i = 0; i < parts.length; i++) {
      var part = parts[i];
      if (current == null) return null;
      if (Array.isArray(current)) {
        if (part === 'length') {
          current = current.length;
        } else if (/^\d+$/.test(part) && Number(part) < current.length) {
          current = current[Number(part)];
        } else {
          return null;
        }
      } else if (isObject(current)) {
        current = Object.prototype.hasOwnProperty.call(current, part) ? current[part] : null;
      } else {
        return null;
      }
    }
    return current === undefined ? null : current;
  }

  function hasBinding(text) {
    return typeof text === 'string' && text.indexOf('{{') !== -1 && text.indexOf('}}') !== -1;
  }

  function interpolate(text, data) {
    if (!text) return text || '';
    if (data == null) return text;
    return text.replace(BINDING_PATTERN, function (match, path) {
      return toDisplayString(resolvePath(path.trim(), data));
    });
  }

  function bindingOf(props) {
    return props && props.binding != null ? String(props.binding).trim() : '';
  }

  // Visibility conditions

  function tokenize(condition) {
    var tokens = [];
    var position = 0;
    while (position < condition.length) {
      var match = CONDITION_TOKEN.exec(condition.slice(position));
      if (!match) throw new SyntaxError('Unexpected character at ' + position);
      if (match[2]) tokens.push({ kind: 'op', value: match[2] });
      else if (match[3]) tokens.push({ kind: 'string', value: match[3] });
      else if (match[4]) tokens.push({ kind: 'number', value: match[4] });
      else if (match[5]) tokens.push({ kind: 'path', value: match[5] });
      position += match[0].length;
    }
    return tokens;
  }

  function parseCondition(condition) {
    var tokens = tokenize(condition);
    var index = 0;

    function peek() { return index < tokens.length ? tokens[index] : null; }

    function accept(value) {
      var token = peek();
      if (token && token.kind === 'op' && token.value === value) {
        index += 1;
        return true;
      }
      return false;
    }

    function parseOr() {
      var operands = [parseAnd()];
      while (accept('||')) operands.push(parseAnd());
      return operands.length === 1 ? operands[0] : { node: 'or', operands: operands };
    }

    function parseAnd() {
      var operands = [parseUnary()];
      while (accept('&&')) operands.push(parseUnary());
      return operands.length === 1 ? operands[0] : { node: 'and', operands: operands };
    }

    function parseUnary() {
      if (accept('!')) return { node: 'not', operand: parseUnary() };
      return parseCompare();
    }

    function parseCompare() {
      var left = parseOperand();
      var token = peek();
      if (token && token.kind === 'op' && COMPARISON_OPERATORS.indexOf(token.value) !== -1) {
        index += 1;
        return { node: 'cmp', operator: token.value, left: left, right: parseOperand() };
      }
      return left;
    }

    function parseOperand() {
      var token = peek();
      if (!token) throw new SyntaxError('Unexpected end of condition');
      index += 1;
      if (token.kind === 'op' && token.value === '(') {
        var inner = parseOr();
        if (!accept(')')) throw new SyntaxError('Missing closing parenthesis');
        return inner;
      }
      if (token.kind === 'string') {
        return { node: 'lit', value: token.value.slice(1, -1).replace(/\\(.)/g, '$1') };
      }
      if (token.kind === 'number') return { node: 'lit', value: parseFloat(token.value) };
      if (token.kind === 'path') {
        if (Object.prototype.hasOwnProperty.call(KEYWORDS, token.value)) {
          return { node: 'lit', value: KEYWORDS[token.value] };
        }
        return { node: 'path', path: token.value.replace(/\?\./g, '.') };
      }
      throw new SyntaxError('Unexpected token ' + token.value);
    }

    var tree = parseOr();
    if (peek()) throw new SyntaxError('Unexpected token ' + peek().value);
    return tree;
  }

  function isTruthy(value) {
    if (value == null || value === false) return false;
    if (typeof value === 'number') return value !== 0 && !isNaN(value);
    if (typeof value === 'string') return value !== '';
    return true;
  }

  function lookup(path, data) {
    if (path === 'data') return data;
    if (/\.length$/.test(path)) {
      var base = lookup(path.slice(0, -'.length'.length), data);
      if (typeof base === 'string' || Array.isArray(base)) return base.length;
    }
    return resolvePath(path, data);
  }

  function looseOperands(left, right) {
    function asNumber(text) {
      var number = text.trim() === '' ? NaN : Number(text);
      return isNaN(number) ? text : number;
    }
    if (typeof left === 'number' && typeof right === 'string') return [left, asNumber(right)];
    if (typeof left === 'string' && typeof right === 'number') return [asNumber(left), right];
    return [left, right];
  }

  function strictEqual(left, right) {
    if (left !== null && typeof left === 'object' && right !== null && typeof right === 'object') {
      return JSON.stringify(left) === JSON.stringify(right);
    }
    return left === right;
  }

  function compare(operator, left, right) {
    if (operator === '===') return strictEqual(left, right);
    if (operator === '!==') return !strictEqual(left, right);
    var operands = looseOperands(left, right);
    if (operator === '==') return strictEqual(operands[0], operands[1]);
    if (operator === '!=') return !strictEqual(operands[0], operands[1]);
    left = operands[0];
    right = operands[1];
    var comparable = (typeof left === 'number' && typeof right === 'number') ||
      (typeof left === 'string' && typeof right === 'string');
    if (!comparable) return false;
    if (operator === '>') return left > right;
    if (operator === '>=') return left >= right;
    if (operator === '<') return left < right;
    return left <= right;
  }

  function evaluate(node, data) {
    var value = null;
    var i;
    switch (node.node) {
      case 'lit':
        return node.value;
      case 'path':
        return lookup(node.path, data);
      case 'not':
        return !isTruthy(evaluate(node.operand, data));
      case 'cmp':
        return compare(node.operator, evaluate(node.left, data), evaluate(node.right, data));
      case 'and':
        for (i = 0; i < node.operands.length; i++) {
          value = evaluate(node.operands[i], data);
          if (!isTruthy(value)) return value;
        }
        return value;
      case 'or':
        for (i = 0; i < node.operands.length; i++) {
          value = evaluate(node.operands[i], data);
          if (isTruthy(value)) return value;
        }
        return value;
    }
    throw new SyntaxError('Unknown expression node');
  }

  function evaluateCondition(condition, data) {
    if (!condition || !String(condition).trim() || data == null) return true;
    try {
      return isTruthy(evaluate(parseCondition(String(condition).trim()), data));
    } catch (e) {
      log('warn', 'Visibility condition could not be evaluated: ' + condition, e && e.message);
      return true;
    }
  }

  // Dates

  function dateParts(value) {
    if (value == null || typeof value === 'boolean') return null;
    if (typeof value === 'number') {
      var moment = new Date(value);
      if (isNaN(moment.getTime())) return null;
      return {
        year: moment.getUTCFullYear(), month: moment.getUTCMonth() + 1, day: moment.getUTCDate(),
        hour: moment.getUTCHours(), minute: moment.getUTCMinutes(), second: moment.getUTCSeconds()
      };
    }
    var match = ISO_DATE.exec(String(value).trim());
    if (!match) return null;
    var parts = {
      year: Number(match[1]), month: Number(match[2]), day: Number(match[3]),
      hour: Number(match[4] || 0), minute: Number(match[5] || 0), second: Number(match[6] || 0)
    };
    var check = new Date(Date.UTC(parts.year, parts.month - 1, parts.day));
    if (parts.month < 1 || parts.month > 12 || check.getUTCDate() !== parts.day ||
        parts.hour > 23 || parts.minute > 59 || parts.second > 59) {
      return null;
    }
    return parts;
  }

  function localDateParts(moment) {
    return {
      year: moment.getFullYear(), month: moment.getMonth() + 1, day: moment.getDate(),
      hour: moment.getHours(), minute: moment.getMinutes(), second: moment.getSeconds()
    };
  }

  function pad(value, width) {
    var text = String(value);
    while (text.length < width) text = '0' + text;
    return text;
  }

  function formatDate(parts, pattern) {
    var weekday = new Date(Date.UTC(parts.year, parts.month - 1, parts.day)).getUTCDay();
    var values = {
      yyyy: pad(parts.year, 4),
      MMMM: MONTH_NAMES[parts.month - 1],
      MMM: MONTH_NAMES[parts.month - 1].slice(0, 3),
      MM: pad(parts.month, 2),
      dddd: DAY_NAMES[weekday],
      ddd: DAY_NAMES[weekday].slice(0, 3),
      dd: pad(parts.day, 2),
      HH: pad(parts.hour, 2),
      mm: pad(parts.minute, 2),
      ss: pad(parts.second, 2)
    };
    return pattern.replace(new RegExp(DATE_TOKEN_PATTERN, 'g'), function (token) { return values[token]; });
  }

  function resolveDateFormat(formatKey, customFormat) {
    if (!formatKey) return DATE_FORMATS['date-long'];
    if (formatKey === 'custom') return customFormat || DATE_FORMATS.iso;
    return Object.prototype.hasOwnProperty.call(DATE_FORMATS, formatKey) ? DATE_FORMATS[formatKey] : formatKey;
  }

  // Binders

  function normalizeStatus(value) {
    var status = toDisplayString(value).trim().toLowerCase();
    if (Object.prototype.hasOwnProperty.call(STATUS_STYLES, status)) return status;
    return status === 'true' || status === '1' || status === 'yes' ? 'pass' : 'neutral';
  }

  function statusLabel(status, props) {
    if (props.label) return toDisplayString(props.label);
    var labelProp = { pass: 'passLabel', fail: 'failLabel', warning: 'warningLabel' }[status];
    if (labelProp && props[labelProp]) return toDisplayString(props[labelProp]);
    return STATUS_STYLES[status].label;
  }

  function normalizeColumns(columns, rows) {
    if (typeof columns === 'string') {
      columns = columns.split(',').map(function (part) { return part.trim(); }).filter(Boolean);
    }
    var normalized = [];
    (columns || []).forEach(function (column) {
      var key, label;
      if (isObject(column)) {
        key = toDisplayString(column.key || column.label);
        label = toDisplayString(column.label || key);
      } else {
        key = label = toDisplayString(column);
      }
      if (key) normalized.push({ key: key, label: label });
    });
    if (rows && rows.length) {
      var first = rows[0];
      if (isObject(first) && !normalized.some(function (column) {
        return Object.prototype.hasOwnProperty.call(first, column.key);
      })) {
        normalized = Object.keys(first).map(function (key) { return { key: key, label: key }; });
      } else if (Array.isArray(first) && !normalized.length) {
        normalized = first.map(function (cell, index) {
          return { key: String(index), label: 'Column ' + (index + 1) };
        });
      }
    }
    return normalized;
  }

  function cellValue(row, column, index) {
    if (Array.isArray(row)) return index < row.length ? toDisplayString(row[index]) : '';
    if (isObject(row)) return toDisplayString(row[column.key]);
    return index === 0 ? toDisplayString(row) : '';
  }

  function bindText(el, props, data) {
    if (bindingOf(props)) {
      var value = resolvePath(bindingOf(props), data);
      if (value != null) el.textContent = toDisplayString(value);
      return;
    }
    if (hasBinding(props.text)) el.textContent = interpolate(props.text, data);
  }

  function bindTable(el, props, data) {
    var rows = resolvePath(bindingOf(props), data);
    if (!Array.isArray(rows)) {
      if (rows != null) log('warn', 'Table binding did not resolve to an array: ' + bindingOf(props));
      return;
    }
    var columns = normalizeColumns(props.columns, rows);
    var border = 'border: 1px solid ' + escapeHtml(props.borderColor) + '; padding: 8px;';
    var html = '<table class="report-table" style="width: 100%; border-collapse: collapse; font-size: 14px;">' +
      '<thead><tr style="background: ' + escapeHtml(props.headerColor) + ';">';
    columns.forEach(function (column) {
      html += '<th style="' + border + ' text-align: left; color: #fff;">' + escapeHtml(column.label) + '</th>';
    });
    html += '</tr></thead><tbody>';
    rows.forEach(function (row, rowIndex) {
      var background = rowIndex % 2 === 0 ? escapeHtml(props.rowColor) : '#f5f5f5';
      html += '<tr style="background: ' + background + ';">';
      columns.forEach(function (column, index) {
        html += '<td style="' + border + ' color: #333;">' + escapeHtml(cellValue(row, column, index)) + '</td>';
      });
      html += '</tr>';
    });
    el.innerHTML = html + '</tbody></table>';
  }

  function bindBulletList(el, props, data) {
    var items = resolvePath(bindingOf(props), data);
    if (items == null) return;
    var values = Array.isArray(items) ? items.map(toDisplayString) : toDisplayString(items).split('\n');
    var list = el.querySelector('.report-list');
    if (!list) return;
    while (list.firstChild) list.removeChild(list.firstChild);
    values.filter(function (value) { return value.trim(); }).forEach(function (value) {
      var item = document.createElement('li');
      item.style.marginBottom = '4px';
      item.textContent = value;
      list.appendChild(item);
    });
  }

  function bindIndicator(el, props, data) {
    var value = resolvePath(bindingOf(props), data);
    if (value == null) return;
    var status = normalizeStatus(value);
    var palette = STATUS_STYLES[status];
    el.setAttribute('data-status', status);
    var badge = el.querySelector('.indicator-badge');
    if (badge) {
      badge.style.borderColor = palette.borderColor;
      badge.style.background = palette.bgColor;
    }
    var icon = el.querySelector('.indicator-icon');
    if (icon) {
      icon.style.color = palette.textColor;
      icon.innerHTML = palette.icon;
    }
    var label = el.querySelector('.indicator-label');
    if (label) {
      label.style.color = palette.textColor;
      label.textContent = statusLabel(status, props);
    }
  }

  function numericRange(props) {
    var min = coerceNumber(props.min) || 0;
    var max = coerceNumber(props.max);
    return { min: min, max: max == null ? 100 : max };
  }

  function bindGauge(el, props, data) {
    var value = coerceNumber(resolvePath(bindingOf(props), data));
    if (value == null) return;
    var range = numericRange(props);
    var percentage = clampPercentage(value, range.min, range.max);
    var arcLength = parseFloat(el.getAttribute('data-arc-length'));
    var circumference = parseFloat(el.getAttribute('data-circumference'));
    if (isNaN(arcLength) || isNaN(circumference)) {
      var size = Math.max(Math.min(el.offsetWidth, el.offsetHeight) - 20, 0);
      circumference = 2 * Math.PI * Math.max(size / 2 - GAUGE_STROKE_WIDTH, 0);
      arcLength = circumference * GAUGE_ARC_FRACTION;
    }
    el.setAttribute('data-value', String(value));
    var arc = el.querySelector('.gauge-value-arc');
    if (arc) arc.setAttribute('stroke-dasharray', (arcLength * percentage / 100) + ' ' + circumference);
    var display = el.querySelector('.gauge-value');
    if (display) display.textContent = toFixed(value, 0) + toDisplayString(props.unit);
  }

  function bindProgressBar(el, props, data) {
    var value = coerceNumber(resolvePath(bindingOf(props), data));
    if (value == null) return;
    var range = numericRange(props);
    var percentage = clampPercentage(value, range.min, range.max);
    el.setAttribute('data-value', String(value));
    var fill = el.querySelector('.progress-fill');
    if (fill) fill.style.width = percentage + '%';
    var display = el.querySelector('.progress-value');
    if (display) display.textContent = toFixed(percentage, 0) + '%';
  }

  function bindDateTime(el, props, data) {
    var value = resolvePath(bindingOf(props), data);
    if (value == null) return;
    var parts = dateParts(value);
    var pattern = resolveDateFormat(props.format, props.customFormat);
    el.textContent = parts ? formatDate(parts, pattern) : toDisplayString(value);
  }

  var BINDERS = {
    text: bindText,
    table: bindTable,
    bulletlist: bindBulletList,
    indicator: bindIndicator,
    gauge: bindGauge,
    progressbar: bindProgressBar,
    datetime: bindDateTime
  };

  function applyVisibility(el, props, data) {
    if (!props.visibilityCondition || evaluateCondition(props.visibilityCondition, data)) {
      el.removeAttribute('data-condition-hidden');
      return true;
    }
    el.style.display = 'none';
    return false;
  }

  function applyBindings(components, data) {
    log('info', 'Applying bindings to ' + components.length + ' components');
    components.forEach(function (component) {
      var el = document.getElementById(component.id);
      if (!el) return;
      var props = component.props || {};
      try {
        if (!applyVisibility(el, props, data)) return;
        var binder = BINDERS[component.type];
        if (binder && (bindingOf(props) || hasBinding(props.text))) binder(el, props, data);
      } catch (e) {
        log('error', 'Binding failed for ' + component.id, e);
      }
    });
  }

  // Charts

  function parseDataPoints(value) {
    if (value == null) return [];
    var items = Array.isArray(value) ? value : String(value).split(',');
    var points = [];
    items.forEach(function (item) {
      if (typeof item === 'string' && !item.trim()) return;
      var number = coerceNumber(item);
      if (number != null) points.push(number);
    });
    return points;
  }

  function chartSeries(value) {
    if (isObject(value) && Array.isArray(value.data)) {
      return { data: parseDataPoints(value.data), labels: Array.isArray(value.labels) ? value.labels : null };
    }
    if (!Array.isArray(value) || !value.length) return null;
    if (isObject(value[0])) {
      var labels = Object.prototype.hasOwnProperty.call(value[0], 'label') ?
        value.map(function (item) { return toDisplayString(isObject(item) ? item.label : null); }) : null;
      var points = value.map(function (item) { return isObject(item) ? item.value : item; });
      return { data: parseDataPoints(points), labels: labels };
    }
    return { data: parseDataPoints(value), labels: null };
  }

  function buildChartData(props, data) {
    var title = props.title || '';
    var labels = clone(props.labels || []);
    var datasets = (props.datasets || []).map(function (dataset) {
      var copy = clone(dataset);
      delete copy.binding;
      delete copy.dataPoints;
      return copy;
    });
    if (!datasets.length) {
      datasets.push({ label: 'Dataset', data: parseDataPoints(DEFAULT_DATA_POINTS), backgroundColor: CHART_COLORS });
    }

    if (data != null) {
      var bindings = props.bindings || {};
      var boundLabels = null;
      if (hasBinding(title)) title = interpolate(title, data);
      var datasetBindings = bindings.datasets || [];
      if (datasetBindings.length) {
        datasetBindings.forEach(function (entry, index) {
          var series = entry && entry.binding ? chartSeries(resolvePath(entry.binding, data)) : null;
          if (series && datasets[index]) {
            datasets[index].data = series.data;
            boundLabels = series.labels || boundLabels;
          }
        });
      } else if (bindings.primaryBinding) {
        var series = chartSeries(resolvePath(bindings.primaryBinding, data));
        if (series) {
          datasets[0].data = series.data;
          boundLabels = series.labels;
        }
      }
      if (boundLabels && boundLabels.length) labels = boundLabels.map(toDisplayString);
    }

    var options = clone(props.options || {});
    options.plugins = options.plugins || {};
    options.plugins.title = options.plugins.title || { display: true };
    options.plugins.title.text = title;
    return { type: props.chartType || 'bar', data: { labels: labels, datasets: datasets }, options: options };
  }

  function waitForChartLibrary(timeout) {
    return new Promise(function (resolve) {
      if (typeof Chart !== 'undefined') {
        resolve(true);
        return;
      }
      var settled = false;
      var started = Date.now();
      function finish(ready) {
        if (settled) return;
        settled = true;
        window.removeEventListener('chartjs-loaded', onLoaded);
        resolve(ready);
      }
      function onLoaded() { finish(true); }
      function poll() {
        if (typeof Chart !== 'undefined') return finish(true);
        if (Date.now() - started >= timeout) return finish(false);
        setTimeout(poll, 50);
      }
      window.addEventListener('chartjs-loaded', onLoaded);
      poll();
    });
  }

  function renderCharts(config, data) {
    var charts = (config.components || []).filter(function (component) { return component.type === 'chart'; });
    if (!charts.length) return Promise.resolve();
    var timeout = (config.templateConfig || {}).chartWaitTimeout || 0;
    return waitForChartLibrary(timeout).then(function (ready) {
      if (!ready) {
        log('warn', 'Chart.js not loaded, charts keep their placeholders');
        return;
      }
      charts.forEach(function (component) {
        var el = document.getElementById(component.id);
        if (!el || el.style.display === 'none') return;
        var canvas = document.getElementById(component.id + '-canvas') || el.querySelector('canvas');
        if (!canvas) return;
        try {
          new Chart(canvas.getContext('2d'), buildChartData(component.props || {}, data));
        } catch (e) {
          log('error', 'Error rendering chart ' + component.id, e);
        }
      });
    });
  }

  // Pipeline

  function loadData(config) {
    if (config.sampleData != null) {
      log('info', 'Using embedded sample data');
      return Promise.resolve(config.sampleData);
    }
    var templateConfig = config.templateConfig || {};
    var path = templateConfig.dataPath || './report_data.json';
    var timeout = templateConfig.fetchTimeout || 0;
    var controller = typeof AbortController !== 'undefined' ? new AbortController() : null;
    var timer = controller && timeout > 0 ? setTimeout(function () { controller.abort(); }, timeout) : null;

    return Promise.resolve()
      .then(function () {
        return fetch(path, controller ? { signal: controller.signal } : {});
      })
      .then(function (response) {
        if (!response.ok) {
          log('warn', 'Could not load data file: ' + response.status + ' ' + response.statusText);
          return null;
        }
        log('info', 'Loaded data from ' + path);
        return response.json();
      })
      .catch(function (e) {
        log('warn', 'Error loading data file', e && e.message);
        return null;
      })
      .then(function (data) {
        if (timer) clearTimeout(timer);
        return data == null ? null : data;
      });
  }

  function schedulePrint(templateConfig) {
    if (!templateConfig.autoPrint) return;
    setTimeout(function () {
      try {
        window.print();
      } catch (e) {
        log('error', 'Print failed', e);
      }
    }, templateConfig.printDelay || 0);
  }

  var initialized = false;

  function init(config) {
    if (initialized) {
      log('warn', 'Runtime already initialized');
      return Promise.resolve();
    }
    initialized = true;
    config = config || {};
    var templateConfig = config.templateConfig || {};

    return loadData(config)
      .then(function (data) {
        if (data != null) {
          applyBindings(config.components || [], data);
        } else {
          log('warn', 'No data available for binding');
        }
        return renderCharts(config, data);
      })
      .catch(function (e) {
        log('error', 'Runtime failed', e);
      })
      .then(function () {
        schedulePrint(templateConfig);
      });
  }

  function readConfig() {
    var element = document.getElementById(CONFIG_ELEMENT_ID);
    var config = { templateConfig: {}, components: [], sampleData: null };
    if (element) {
      try {
        config = JSON.parse(element.textContent);
      } catch (e) {
        log('error', 'Runtime config could not be parsed', e);
      }
    }
    return deepFreeze(config);
  }

  window.ReportRuntime = Object.freeze({
    init: init,
    readConfig: readConfig,
    resolvePath: resolvePath,
    interpolate: interpolate,
    evaluateCondition: evaluateCondition,
    formatDate: formatDate
  });

  function start() {
    window.ReportRuntime.init(readConfig());
  }

  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', start);
  } else {
    start();
  }
{% endraw %}
})();
"""


def runtime_constants() -> Dict[str, Any]:
    """Constants injected into the runtime prologue"""
    return {
        "config_element_id": RUNTIME_CONFIG_ELEMENT_ID,
        "status_styles": STATUS_STYLES,
        "date_formats": DEFAULT_FORMATS,
        "month_names": MONTH_NAMES,
        "day_names": DAY_NAMES,
        "date_token_pattern": DATE_TOKEN_PATTERN,
        "chart_colors": DEFAULT_CHART_COLORS,
        "default_data_points": DEFAULT_DATA_POINTS,
        "gauge_stroke_width": GAUGE_STROKE_WIDTH,
        "gauge_arc_fraction": GAUGE_ARC_FRACTION,
    }


@lru_cache()
def render_runtime_script() -> str:
    """The runtime program with constants filled in"""
    engine = TemplateEngine({RUNTIME_TEMPLATE_NAME: RUNTIME_TEMPLATE})
    return engine.render_template(RUNTIME_TEMPLATE_NAME, **runtime_constants())


def build_template_config(options: ExportOptions, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Document-level runtime settings; unset options fall back to settings"""
    settings = settings or get_settings()

    def pick(value, default):
        return default if value is None else value

    return {
        "pageSize": options.page_size.value,
        "margins": options.margins.model_dump(),
        "autoPrint": pick(options.auto_print, settings.runtime_auto_print),
        "printDelay": pick(options.print_delay_ms, settings.runtime_print_delay_ms),
        "dataPath": pick(options.data_path, settings.runtime_data_path),
        "fetchTimeout": pick(options.fetch_timeout_ms, settings.runtime_fetch_timeout_ms),
        "chartWaitTimeout": settings.runtime_chart_wait_ms,
    }


def build_runtime_config(
    components: Iterable[RuntimeComponentConfig],
    sample_data: Any,
    options: ExportOptions,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """Payload of the JSON config island

    Sample data is embedded only when requested and present; otherwise the
    runtime fetches ``dataPath``.
    """
    embed = options.include_sample_data and sample_data is not None
    return {
        "templateConfig": build_template_config(options, settings),
        "components": [component.model_dump() for component in components],
        "sampleData": sample_data if embed else None,
    }
